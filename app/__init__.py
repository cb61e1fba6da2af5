from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from dotenv import load_dotenv
import os
import logging

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()

def create_app(test_config=None):
    # Validate required environment variables
    if test_config is None:
        required_vars = ['SECRET_KEY']
        for var in required_vars:
            if not os.getenv(var):
                raise ValueError(f"Required environment variable {var} is not set")

    app = Flask(__name__)
    app.config.from_object('config')
    if test_config is not None:
        app.config.update(test_config)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    login_manager.init_app(app)

    # Register blueprints
    from app.core.auth import auth_bp
    from app.projects.todo.routes import todo_bp
    from app.projects.friends.routes import friends_bp
    from app.routes.preferences import preferences_bp

    for bp in (auth_bp, todo_bp, friends_bp, preferences_bp):
        # JSON API: no form posts, so no CSRF token to check
        csrf.exempt(bp)
        app.register_blueprint(bp)

    # Import models to ensure they're known to Flask-SQLAlchemy
    from app.models import User, LogEntry
    from app.projects.todo.models import TodoItem
    from app.projects.friends.models import Friendship

    from app.core.errors import register_error_handlers
    register_error_handlers(app)

    from app.projects.todo.commands import meowtodo_cli
    app.cli.add_command(meowtodo_cli)

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from app.core.errors import Unauthorized
        raise Unauthorized()

    return app
