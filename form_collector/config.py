from __future__ import annotations

from pathlib import Path

# Paths and filenames
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "form_collector" / "data"
LOCAL_STORAGE_DIR = DATA_DIR / "local_storage"
VIEWS_DIR = Path(__file__).resolve().parent / "views"

# Durable client-local storage
STORAGE_KEY = "form_submissions"
LOCAL_STORAGE_QUOTA = 5 * 1024 * 1024

# Enumerated catalogs
GENDER_OPTIONS = ["male", "female", "other"]
HOBBY_OPTIONS = ["coding", "reading", "music", "sports"]
SCALAR_FIELDS = ("name", "email", "age", "gender", "bio")

# Form defaults
DEFAULT_FORM = {
    "name": "",
    "email": "",
    "age": "",
    "gender": "",
    "bio": "",
    "hobbies": [],
    "agree": False,
    "profile": None,
}

# Validation
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
ERROR_MESSAGES = {
    "name": "Name is required.",
    "email_required": "Email is required.",
    "email_invalid": "Enter a valid email.",
    "age": "Enter a valid age.",
    "gender": "Please select your gender.",
    "agree": "You must agree to the terms.",
}

# Image handling
PREVIEW_ROUTE = "/preview"
PREVIEW_TOKEN_PREFIX = "blob:"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
UPLOAD_ACCEPT = "image/*"
IMAGE_EXTENSIONS = ["png", "jpg", "jpeg", "gif", "webp", "bmp"]
PREVIEW_PLACEHOLDER = "No image"
MISSING_PROFILE = "—"

# Dash shell: form controllers kept for the most recent page loads
MAX_LIVE_PAGES = 64

# Activity log
SCHEMA_VERSION = 1
APP_MODE = "dash"

# CSV export column order
CSV_COLUMNS = [
    "timestamp",
    "name",
    "email",
    "age",
    "gender",
    "bio",
    "hobbies",
    "profileUrl",
]

# HTTP form endpoint
ENDPOINT_HOST = "127.0.0.1"
ENDPOINT_PORT = 3000
SUBMISSIONS_FILE = DATA_DIR / "submissions.json"
SUBMITTED_AT_FORMAT = "%m/%d/%Y, %I:%M:%S %p"
ACK_PAGE = """
    <h2>Form Submitted Successfully!</h2>
    <p>Your data has been saved in <b>submissions.json</b>.</p>
    <a href="/">Go Back to Form</a>
"""

# Table columns for the saved submissions view
TABLE_COLUMNS = ["Name", "Email", "Age", "Gender", "Hobbies", "Profile", "When", "Action"]
