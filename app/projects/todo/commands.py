import click
from flask.cli import with_appcontext
import logging

logger = logging.getLogger(__name__)

@click.group(name='meowtodo')
def meowtodo_cli():
    """MeowTODO commands."""
    pass

@meowtodo_cli.command('create-demo-user')
@with_appcontext
def create_demo_user_command():
    """Create the shared demo account if it does not exist yet."""
    from app.core.auth import get_or_create_demo_user

    user = get_or_create_demo_user()
    click.echo(f"Demo account ready: {user.username} (id {user.id})")

@meowtodo_cli.command('stats')
@with_appcontext
def stats_command():
    """Print user, todo and friendship counts."""
    from app.models import User
    from app.projects.todo.models import TodoItem
    from app.projects.friends.models import Friendship

    users = User.query.count()
    todos = TodoItem.query.count()
    completed = TodoItem.query.filter_by(completed=True).count()
    friendships = Friendship.query.count()

    click.echo(f"Users: {users}")
    click.echo(f"Todos: {todos} ({completed} completed)")
    click.echo(f"Friendships: {friendships}")
