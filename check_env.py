#!/usr/bin/env python3
"""Helper script to check and create the .env file for the delivery API."""

from pathlib import Path
import os
import sys

ENV_TEMPLATE = """# Supabase Configuration (Required for delivery storage)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
DLV_SUPABASE_URL=https://your-project-id.supabase.co
DLV_SUPABASE_KEY=your-service-role-key-here
DLV_DELIVERIES_TABLE=item_delivery
DLV_LOCATIONS_VIEW=zip_code_view

# Fallback reference location table (CSV or XLSX)
DLV_LOCATIONS_FILE=./data/zip_codes.csv

# Slip upload service
DLV_UPLOAD_IMAGE_API_URL=https://your-upload-service/upload

# LINE
DLV_LINE_CHANNEL_ACCESS_TOKEN=
DLV_LIFF_CONFIRM_URL=https://liff.line.me/your-liff-id/confirm

# Validation switches
DLV_STRICT_ADDRESS_VALIDATION=false
DLV_REQUIRE_SLIP_FOR_HOME=false
"""

SECRET_KEYS = ("DLV_SUPABASE_KEY", "DLV_LINE_CHANNEL_ACCESS_TOKEN")
CHECKED_KEYS = ("DLV_SUPABASE_URL", "DLV_SUPABASE_KEY", "DLV_UPLOAD_IMAGE_API_URL", "DLV_LINE_CHANNEL_ACCESS_TOKEN")


def _mask(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() in SECRET_KEYS and len(value) > 20:
        return f"{name}={value[:20]}...{value[-10:]}"
    return line


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Delivery API Environment Variables Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase and upload service settings!")
        return

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_mask(line))
    print("-" * 60)
    print()

    for key in CHECKED_KEYS:
        if os.getenv(key):
            print(f"✅ {key} set in environment")
        else:
            print(f"➖ {key} not set in environment (may come from .env)")
    print()

    sys.path.insert(0, str(project_root / "src"))
    from liff_delivery.config import settings

    checks = {
        "Supabase": bool(settings.supabase_url and settings.supabase_key),
        "Slip upload": bool(settings.upload_image_api_url),
        "LINE push": bool(settings.line_channel_access_token),
        "Location file": bool(settings.locations_file and settings.locations_file.exists()),
    }
    for name, ok in checks.items():
        print(f"{'✅' if ok else '❌'} {name} {'configured' if ok else 'NOT configured'}")

    if not checks["Supabase"]:
        print()
        print("Troubleshooting:")
        print("1. Make sure .env file exists in project root")
        print("2. Make sure variables start with DLV_ prefix")
        print("3. Make sure there are no spaces around = sign")
        print("4. Restart backend after editing .env")


if __name__ == "__main__":
    main()
