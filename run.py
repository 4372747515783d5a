# /run.py
"""Development entry point. Use ``flask --app run init-db`` for database setup."""
import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Now, import the app factory
from clinic import create_app

# Create the app instance
app = create_app(os.getenv('CLINIC_CONFIG'))

if __name__ == '__main__':
    print("Starting server with Flask dev server...")
    app.run(host='127.0.0.1', port=int(os.getenv('PORT', 5000)), debug=app.config.get('DEBUG', False))
