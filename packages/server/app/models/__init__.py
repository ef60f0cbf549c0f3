# SQLModel definitions, imported here so create_all sees every table.
from .base import new_id  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .member import Member  # noqa: F401
from .invitation import Invitation  # noqa: F401
from .outline import Outline  # noqa: F401
