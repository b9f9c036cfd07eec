import os
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))

def _resolve_sqlite_path(uri: str, project_root: str) -> str:
    """Convert relative SQLite URI to absolute path.

    Args:
        uri: SQLite URI like 'sqlite:///instance/local.db'
        project_root: Absolute path to project root directory

    Returns:
        Absolute SQLite URI like 'sqlite:////srv/stnh/instance/local.db'
    """
    if not uri.startswith('sqlite:///') or uri == 'sqlite:///:memory:':
        return uri

    relative_path = uri[10:]  # Remove 'sqlite:///'
    absolute_path = os.path.abspath(os.path.join(project_root, relative_path))

    # Instance directory must exist before SQLAlchemy opens the file
    instance_dir = os.path.dirname(absolute_path)
    if instance_dir and not os.path.exists(instance_dir):
        os.makedirs(instance_dir, exist_ok=True)

    # SQLite expects forward slashes, including on Windows (sqlite:///E:/path/db.db)
    absolute_path = absolute_path.replace('\\', '/')

    return f'sqlite:///{absolute_path}'


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in {"true", "1", "t", "yes", "y"}


class Config:
    # Compute IS_DEV once
    _env = os.environ.get("FLASK_ENV") or os.environ.get("ENV") or "production"
    IS_DEV = str(_env).lower() in {"development", "dev"}

    # In production SECRET_KEY must be set.
    # In development we allow a fallback to avoid breaking local runs.
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY and IS_DEV:
        SECRET_KEY = "dev-secret-key"

    SQLALCHEMY_DATABASE_URI = _resolve_sqlite_path(
        os.environ.get('DATABASE_URL', 'sqlite:///instance/local.db'),
        basedir,
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_DB = _env_flag("AUTO_CREATE_DB")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # "publish" writes straight to posts, "moderate" parks it in submissions
    SUBMISSION_MODE = os.environ.get("SUBMISSION_MODE", "publish").lower()

    POSTS_PER_PAGE = int(os.environ.get("POSTS_PER_PAGE", "10"))
    MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", "50"))

    # Reject tweet ids that are not purely numeric
    STRICT_POST_IDS = _env_flag("STRICT_POST_IDS", "1")
