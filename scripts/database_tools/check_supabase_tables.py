"""
Quick script to check the operations tables exist and preview row counts
"""
from dotenv import load_dotenv
from supabase import create_client
import os

load_dotenv()

supabase = create_client(
    os.getenv("SUPABASE_URL"),
    os.getenv("SUPABASE_SERVICE_KEY")
)

print("Checking operations tables...\n")

tables_to_check = [
    "branches",
    "profiles",
    "places",
    "guards",
    "assignments",
    "attendance",
    "inventory_items",
    "inventory_assignments",
    "invoices",
    "service_packages",
    "service_requests",
    "inquiries",
]

for table in tables_to_check:
    try:
        result = supabase.table(table).select("*").limit(1).execute()
        count_result = supabase.table(table).select("id", count="exact", head=True).execute()
        print(f"✅ Table '{table}': {count_result.count} rows")
        if result.data:
            print(f"   Columns: {list(result.data[0].keys())}\n")
    except Exception as e:
        print(f"❌ Table '{table}' not found or error: {str(e)[:100]}\n")
