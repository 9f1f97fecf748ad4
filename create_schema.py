import asyncio
import logging
from app.config import Settings
from app.errors import StoreUnavailable
from app.subscribers import build_store

logging.basicConfig(level=logging.INFO)

async def create_schema():
    settings = Settings(store_backend="postgres")
    try:
        store = build_store(settings)
        await store.init()
    except StoreUnavailable as e:
        print(f"❌ Error: {e}")
        return False

    await store.close()
    print("✓ subscribers table, unique email index and LOWER(email) index ready")
    return True

if __name__ == "__main__":
    success = asyncio.run(create_schema())
    print("✅ Schema creation completed!" if success else "❌ Schema creation failed!")
    exit(0 if success else 1)
