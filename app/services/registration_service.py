import logging
from sqlalchemy.orm import Session

from app.crud import school_crud, user_crud
from app.models.user_model import RoleEnum, User
from app.schemas.user_schema import SignupRequest

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in RoleEnum}


def register_user(db: Session, signup_in: SignupRequest):
    """
    Đăng ký tài khoản mới.
    - Hiệu trưởng tạo trường mới (mỗi trường chỉ có một hiệu trưởng).
    - Học sinh / giáo viên phải chọn trường đã tồn tại.
    Trả về (user, school); lỗi nghiệp vụ ném ValueError.
    """
    if signup_in.role not in VALID_ROLES:
        raise ValueError("Invalid role")

    if user_crud.get_user_by_email(db, signup_in.email):
        raise ValueError("Email already registered")

    role = RoleEnum(signup_in.role)
    existing_school = school_crud.get_school_by_name(db, signup_in.school_name)

    try:
        if role == RoleEnum.head_teacher:
            if existing_school:
                raise ValueError("School already exists with a head teacher")
            school = school_crud.create_school(db, signup_in.school_name)
        else:
            if not existing_school:
                raise ValueError("School not found")
            school = existing_school

        user: User = user_crud.create_user(
            db,
            email=signup_in.email,
            password=signup_in.password,
            full_name=signup_in.full_name,
            role=role,
            school_id=school.school_id,
            grade=signup_in.grade,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info(f"Registered {role.value} {user.email} in school {school.name}")
    return user, school
