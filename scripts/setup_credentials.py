#!/usr/bin/env python3
"""
Setup script for DriveUploader credentials.

This script helps users set up the environment file and directories
DriveUploader needs before the first run.
"""

from pathlib import Path


def create_env_file():
    """Create .env file with template values."""
    env_path = Path(".env")

    if env_path.exists():
        print("ℹ️  .env file already exists")
        response = input("Do you want to overwrite it? (y/N): ")
        if response.lower() != 'y':
            return

    env_content = """# DriveUploader Configuration

# Google OAuth client (served to the page at /config)
GOOGLE_CLIENT_ID=your-oauth-client-id.apps.googleusercontent.com
GOOGLE_API_KEY=your-google-api-key

# Installed-app sign-in: either a client secret or a downloaded secrets file
GOOGLE_CLIENT_SECRET=your-oauth-client-secret
# GOOGLE_CLIENT_SECRETS_FILE=configs/credentials/client_secret.json

# Cache the signed-in token between restarts (optional)
# GOOGLE_TOKEN_FILE=configs/credentials/token.json

# Upload Configuration
UPLOAD_FOLDER_NAME=uploads

# Server Configuration
PORT=3000
# Every visitor uploads with the signed-in account; widen only on a trusted network
SERVER_HOST=127.0.0.1
SERVER_PUBLIC_DIR=public

# Logging Configuration
LOG_LEVEL=INFO
LOG_FILE=logs/app.log
"""

    env_path.write_text(env_content)
    print(f"✅ Created {env_path}")
    print("📝 Please edit the .env file with your actual credentials")


def setup_directories():
    """Create necessary directories."""
    dirs_to_create = [
        "logs",
        "configs/credentials",
        "public"
    ]

    for dir_name in dirs_to_create:
        dir_path = Path(dir_name)
        dir_path.mkdir(parents=True, exist_ok=True)
        print(f"📁 Created directory: {dir_path}")


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import click
        import googleapiclient
        import google_auth_oauthlib
        import httpx
        import nicegui
        import pydantic
        print("✅ All required dependencies are installed")
        return True
    except ImportError as e:
        print(f"❌ Missing dependency: {e}")
        print("💡 Run 'uv sync' to install dependencies")
        return False


def main():
    """Main setup function."""
    print("🚀 DriveUploader Setup Script")
    print("=" * 40)

    if not check_dependencies():
        print("\n⚠️  Please install dependencies before continuing")
        return

    print("\n📁 Setting up directories...")
    setup_directories()

    print("\n🔧 Setting up environment file...")
    create_env_file()

    print("\n" + "=" * 50)
    print("🎉 Setup completed!")
    print("\nNext steps:")
    print("1. 📝 Edit .env file with your OAuth client ID, secret and API key")
    print("2. 🔍 Run 'uv run python -m src.main config' to check what /config will serve")
    print("3. 🌐 Run 'uv run python -m src.main serve' and open http://localhost:3000")


if __name__ == "__main__":
    main()
