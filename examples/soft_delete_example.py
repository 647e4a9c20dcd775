#!/usr/bin/env python3
"""
Soft Delete Example - Mongo Soft Delete

IMPORTANT: This is a demonstration file prioritizing readability over
production readiness. It talks to a real MongoDB server; point MONGODB_URI at
one (defaults to mongodb://localhost:27017) and it will use a throwaway
database that is dropped at the end.

Demonstrates:
- Deleting single documents and whole selections
- Default reads, updates, and aggregations hiding deleted documents
- The _with_deleted variants that see everything
"""

import logging
import os

from pymongo import MongoClient

from mongo_soft_delete import Schema, model, soft_delete_plugin

sample_schema = Schema(
    {
        "code": {"type": str, "required": True},
        "site": str,
        "status": {"type": str, "default": "received"},
    }
)
sample_schema.plugin(
    soft_delete_plugin, {"overrideMethods": "all", "indexFields": "all"}
)
Sample = model("Sample", sample_schema)


def demonstrate_soft_delete() -> None:
    """Show soft delete functionality."""
    print("🗑️  Soft Delete Example\n")

    client: MongoClient = MongoClient(
        os.environ.get("MONGODB_URI", "mongodb://localhost:27017")
    )
    database = client["soft_delete_example"]
    Sample.bind(database["samples"])
    Sample.ensure_indexes()

    try:
        # 1. Create test data
        print("1️⃣ Creating Test Data:")

        for code, site in [("S-001", "north"), ("S-002", "north"), ("S-003", "south")]:
            Sample(code=code, site=site).save()

        print(f"  ✓ Created {Sample.count_documents().exec()} samples\n")

        # 2. Soft delete a single document
        print("2️⃣ Soft Deleting Single Document:")

        sample = Sample.find_one({"code": "S-001"}).exec()
        sample.delete()

        print(f"  ✓ Soft deleted {sample.code} at {sample.deleted_at}")
        print(f"  Visible samples: {Sample.count_documents().exec()}")
        print(f"  Total samples: {Sample.count_documents_with_deleted().exec()}\n")

        # 3. Delete by filter
        print("3️⃣ Deleting By Filter:")

        result = Sample.delete({"site": "south"})
        print(f"  ✓ Matched {result.matched_count} document(s)")
        print(f"  Visible samples: {[s.code for s in Sample.find().exec()]}\n")

        # 4. Updates skip deleted documents
        print("4️⃣ Filtered Updates:")

        updated = Sample.update_many({}, {"status": "archived"})
        print(f"  Default update touched: {updated.modified_count}")
        updated = Sample.update_many_with_deleted({}, {"status": "retained"})
        print(f"  Unfiltered update touched: {updated.modified_count}\n")

        # 5. Aggregations
        print("5️⃣ Aggregations:")

        pipeline = [{"$group": {"_id": "$site", "total": {"$sum": 1}}}]
        print(f"  Default: {Sample.aggregate(list(pipeline)).exec()}")
        print(f"  With deleted: {Sample.aggregate_with_deleted(pipeline).exec()}")
    finally:
        client.drop_database(database.name)
        client.close()

    print("\n✅ Soft delete example completed!")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    demonstrate_soft_delete()
