#!/usr/bin/env python3
"""
Seed the first console manager and the company that hosts it.

Reads CONSOLE_MANAGER_EMAIL, CONSOLE_MANAGER_PASSWORD and CONSOLE_COMPANY_NAME
from .env file.
Run from project root: python scripts/seed_console_manager.py
"""

import sys
import os

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# Load .env file
from dotenv import load_dotenv
load_dotenv(os.path.join(project_root, ".env"))

import bcrypt as bcrypt_lib
from sitefunds.db import supabase


def hash_password(password: str) -> str:
    """Hash password using bcrypt directly."""
    return bcrypt_lib.hashpw(password.encode(), bcrypt_lib.gensalt()).decode()


def main():
    email = os.getenv("CONSOLE_MANAGER_EMAIL")
    password = os.getenv("CONSOLE_MANAGER_PASSWORD")
    company_name = os.getenv("CONSOLE_COMPANY_NAME", "Console")

    if not email or not password:
        print("Error: CONSOLE_MANAGER_EMAIL and CONSOLE_MANAGER_PASSWORD must be set in .env")
        sys.exit(1)

    existing = supabase.table("users").select("id").eq("email", email).execute()
    if existing.data:
        print(f"User with email '{email}' already exists.")
        sys.exit(0)

    company = supabase.table("companies").insert({
        "name": company_name,
        "email": email,
        "status": "active",
    }).execute()
    if not company.data:
        print("Error: Failed to create company")
        sys.exit(1)

    result = supabase.table("users").insert({
        "tenant_id": company.data[0]["id"],
        "email": email,
        "password_hash": hash_password(password),
        "first_name": "Console",
        "last_name": "Manager",
        "role": "console_manager",
        "status": "active",
        "must_change_password": False,
    }).execute()

    if result.data:
        user = result.data[0]
        print("Created console manager:")
        print(f"  ID: {user['id']}")
        print(f"  Email: {user['email']}")
        print(f"  Tenant: {user['tenant_id']}")
    else:
        print("Error: Failed to create console manager")
        sys.exit(1)


if __name__ == "__main__":
    main()
