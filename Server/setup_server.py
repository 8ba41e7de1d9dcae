#!/usr/bin/env python3
"""
Research Library Server - Setup and Deployment Script

This script initializes the research library server for deployment:
1. Creates the SQLite database with schema and default settings
2. Creates the default admin account when no admin exists
3. Creates the paper storage directory

Run this script once on the server before starting it for the first time.
Starting the server performs the same steps, so running it again is safe.

Usage:
    python setup_server.py [--yes]
"""

import sys
from pathlib import Path

# Ensure we can import from the same directory
sys.path.insert(0, str(Path(__file__).parent))

import config
from file_storage import PaperStorage
from managers.database_manager import (
    DatabaseManager, DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD
)


def print_header():
    """Print script header"""
    print("=" * 70)
    print("Research Library Server - Setup and Deployment Script")
    print("=" * 70)
    print()


def print_section(title):
    """Print section header"""
    print()
    print("-" * 70)
    print(f"  {title}")
    print("-" * 70)


def initialize_database(db_path: str = None) -> bool:
    """
    Initialize the SQLite database with schema and default data

    Args:
        db_path: Database file (defaults to config.DATABASE_PATH)

    Returns:
        bool: True if the default admin account was created
    """
    print_section("Database Initialization")

    db_file = Path(db_path or config.DATABASE_PATH)
    if db_file.exists():
        print(f"[OK] Database file found at: {db_file.absolute()}")
        print("  Existing database will be updated with any missing tables/settings.")
    else:
        print(f"-> Creating new database at: {db_file.absolute()}")

    try:
        admin_created = DatabaseManager(str(db_file)).InitializeDatabase()
    except Exception as e:
        print(f"[ERROR] Database initialization failed: {str(e)}")
        raise

    print("[OK] Database initialization complete!")
    return admin_created


def initialize_storage(storage_root: str = None) -> Path:
    """
    Create the paper storage directory

    Returns:
        Path: Storage directory
    """
    print_section("Storage Directory Initialization")

    storage = PaperStorage(storage_root)
    try:
        storage.InitializeStorage()
    except Exception as e:
        print(f"[ERROR] Storage initialization failed: {str(e)}")
        raise

    print(f"[OK] Paper storage ready at: {storage.storage_root.absolute()}")
    return storage.storage_root


def print_admin_credentials():
    print()
    print("!" * 70)
    print("!  IMPORTANT: THE DEFAULT ADMIN ACCOUNT USES A WELL-KNOWN PASSWORD  !")
    print("!" * 70)
    print()
    print(f"  Admin Username: {DEFAULT_ADMIN_USERNAME}")
    print(f"  Admin Password: {DEFAULT_ADMIN_PASSWORD}")
    print()
    print("  -> Log in to the dashboard and change it before going live")


def print_next_steps():
    """Print next steps for server deployment"""
    print_section("Next Steps")

    print(f"""
1. Set a session secret so sessions survive restarts:

   export LIBRARY_SESSION_SECRET=<long random string>

2. Allow the frontend origin (comma separated):

   export LIBRARY_CORS_ORIGINS=http://localhost:5173

3. Start the server:

   python server.py

   Or with uvicorn directly:

   uvicorn --factory server:CreateApp --host {config.HOST} --port {config.PORT}
""")


def main(argv=None):
    """Main setup script entry point"""
    argv = sys.argv[1:] if argv is None else argv
    print_header()

    if "--yes" not in argv:
        try:
            response = input("Continue with setup? (Y/n): ")
            if response.lower() == 'n':
                print("\nSetup cancelled.")
                sys.exit(0)
        except KeyboardInterrupt:
            print("\n\nSetup cancelled.")
            sys.exit(0)

    try:
        admin_created = initialize_database()
        initialize_storage()
    except Exception:
        print("\n[ERROR] Setup failed")
        sys.exit(1)

    print()
    print("=" * 70)
    print("[OK] Research Library Server Setup Complete!")
    print("=" * 70)

    if admin_created:
        print_admin_credentials()
    else:
        print()
        print("  An admin account already exists - no default admin created.")

    print_next_steps()


if __name__ == "__main__":
    main()
