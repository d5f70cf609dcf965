import sys
from bus_tracker.config import settings
from bus_tracker.schemas import UserCreate
from bus_tracker.storage import StorageError, create_storage, ensure_bootstrap_admin
from bus_tracker.core.security import get_password_hash
from bus_tracker.core.logger import setup_logging, get_logger

logger = get_logger("create_users")

DEMO_USERS = [
    {
        "username": "parent1",
        "password": "parent123",
        "email": "parent1@example.com",
        "full_name": "Jane Parent",
        "phone": "555-234-5678",
        "role": "parent",
    },
    {
        "username": "driver1",
        "password": "driver123",
        "email": "driver1@school.edu",
        "full_name": "Bob Driver",
        "phone": "555-345-6789",
        "role": "driver",
    },
]


def create_initial_users(storage=None, app_settings=None):
    """Create the bootstrap admin plus one demo parent and driver"""
    app_settings = app_settings or settings
    if storage is None:
        if app_settings.storage_backend.lower() == "memory":
            logger.warning("Memory backend lives only inside the server process; nothing to seed")
            return True
        storage = create_storage(app_settings)
        storage.create_tables()

    try:
        admin = ensure_bootstrap_admin(storage, app_settings)
        logger.info(f"Admin account: {admin.username}")

        for user_data in DEMO_USERS:
            if storage.get_user_by_username(user_data["username"]):
                logger.info(f"User {user_data['username']} already exists")
                continue
            storage.create_user(UserCreate(
                **{**user_data, "password": get_password_hash(user_data["password"], app_settings)}
            ))
            logger.info(f"Created user: {user_data['username']} ({user_data['role']})")
    except StorageError as e:
        logger.error(f"Error creating users: {e}")
        return False

    return True


if __name__ == "__main__":
    setup_logging()
    success = create_initial_users()
    sys.exit(0 if success else 1)
