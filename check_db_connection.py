import sys
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from core.config import settings

COLLECTIONS = ["farms", "districts", "pepper_varieties", "pepper_knowledge", "harvest_seasons"]

def check_connection():
    print("--- Checking MongoDB Connection ---")
    print(f"Connection String (masked): {settings.final_mongo_uri.split('@')[-1] if '@' in settings.final_mongo_uri else '...local...'}")

    try:
        client = MongoClient(settings.final_mongo_uri)
        client.admin.command('ping')
        db = client[settings.db_name]
        for name in COLLECTIONS:
            print(f"  {name}: {db[name].estimated_document_count()} documents")
        print("Connection successful!")
        return True
    except PyMongoError as e:
        print("Connection failed!")
        print(f"Error: {e}")
        return False

if __name__ == "__main__":
    if check_connection():
        sys.exit(0)
    else:
        sys.exit(1)
