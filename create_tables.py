from app.config import load_settings
from app.database import create_db_engine, init_db

settings = load_settings()
engine = create_db_engine(settings.database_url)

print("Creating tables...")
init_db(engine)
print("Tables created successfully!")
