from .base_model import Base
from .school_model import School
from .user_model import User, RoleEnum
from .classroom_model import Classroom
from .progress_model import Progress
from .token_model import RefreshToken
