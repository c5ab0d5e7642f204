from src.db.database import init_db, get_async_session, retry_on_conflict
