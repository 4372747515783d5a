import os
from flask import Flask
from clinic.extensions import db, migrate, limiter, cors
from clinic.utils.error_handlers import register_error_handlers
from clinic.commands import register_commands
from config import config


def create_app(config_name=None):
    app = Flask(__name__)

    config_name = config_name or os.getenv('CLINIC_CONFIG', 'default')
    config_class = config[config_name]
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors.init_app(app, origins=app.config['ALLOWED_ORIGINS'],
                  allow_headers=['Content-Type', 'X-Staff-Id', 'X-Requested-With'],
                  methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'])

    # Initialize app with config (logging, audit logger)
    config_class.init_app(app)

    # Make sure every model is registered with SQLAlchemy
    from clinic import models  # noqa: F401

    # Register blueprints
    from clinic.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    # Register error handlers and commands
    register_error_handlers(app)
    register_commands(app)

    return app
