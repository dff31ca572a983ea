from app.database import Base, engine
from app.models import School, User, Classroom, Progress, RefreshToken  # noqa: F401 (đăng ký bảng vào metadata)
from sqlalchemy import text

def recreate_database():
    print("Đang xóa tất cả các bảng cơ sở dữ liệu (sử dụng CASCADE)...")

    all_table_names = [table.name for table in reversed(Base.metadata.sorted_tables)]

    with engine.connect() as connection:
        for table_name in all_table_names:
            try:
                print(f"Đang xóa bảng: {table_name}")
                connection.execute(text(f"DROP TABLE IF EXISTS {table_name} CASCADE;"))
                connection.commit()
            except Exception as e:
                print(f"Lỗi khi xóa bảng {table_name}: {e}")
                connection.rollback()

        # Enum do SQLAlchemy tạo không bị xóa theo bảng
        connection.execute(text("DROP TYPE IF EXISTS role_enum;"))
        connection.commit()

    print("Đang tạo lại tất cả các bảng cơ sở dữ liệu...")
    Base.metadata.create_all(bind=engine)
    print("Cơ sở dữ liệu đã được tạo lại thành công!")

if __name__ == "__main__":
    recreate_database()
