#!/usr/bin/env python3
"""
Startup script for the UGC Studio server
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from studio.config import get_api_key, get_gemini_image_model


def check_environment():
    """Check if environment is properly configured"""
    print("🔍 Checking environment...")

    if not Path('.env').exists():
        print("⚠️  .env file not found, using system environment variables only")
        print("   Copy env.example to .env and add your GEMINI_API_KEY")

    load_dotenv()

    if not get_api_key():
        print("❌ GEMINI_API_KEY (or GOOGLE_API_KEY) not found in environment")
        return False

    print("✅ Gemini API key configured")
    print(f"✅ Image model: {get_gemini_image_model()}")
    return True


def start_server():
    """Start the Flask server"""
    print("\n🚀 Starting UGC Studio Server...")
    print("=" * 50)

    from app import app

    port = int(os.getenv('PORT', '5000'))
    print("\n📡 Available endpoints:")
    print(f"   API Health:    http://localhost:{port}/api/v1/health")
    print(f"   Scenes:        http://localhost:{port}/api/v1/scenes")
    print(f"   Prepare image: http://localhost:{port}/api/v1/prepare")
    print(f"   Generate:      http://localhost:{port}/api/v1/generate")
    print("\n" + "=" * 50)

    app.run(debug=os.getenv('FLASK_DEBUG', 'false').lower() == 'true', host='0.0.0.0', port=port)


def main():
    """Main startup function"""
    print("🎨 UGC Studio")
    print("=" * 50)

    if not check_environment():
        print("\n❌ Environment check failed. Please fix the issues above.")
        sys.exit(1)

    start_server()


if __name__ == "__main__":
    main()
