# foodorder/main.py
import uvicorn

from foodorder.api import create_app
from foodorder.data.database import Base, create_tables, engine
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

try:
    create_tables(engine)
    logger.info(f"Database tables ready: {list(Base.metadata.tables.keys())}")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
