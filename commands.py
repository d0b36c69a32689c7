# Quick reference commands (run from repo root). These are comments only; copy/paste as needed.

# Install the project with test dependencies, plus the Chromium build Playwright drives
# python -m pip install -e ".[test]"
# python -m playwright install chromium

# Run the full test suite (tests/db is skipped unless DATABASE_URL is set)
# python -m pytest

# Run focused test files
# python -m pytest tests/test_worker_cycle.py tests/test_resolver.py
# python -m pytest tests/test_guru_parsing.py tests/test_freelancer_engine.py
# python -m pytest tests/test_routes.py tests/test_chat.py tests/test_slack.py
# DATABASE_URL=postgresql://localhost/jobsalert_test python -m pytest tests/db

# Start the Slack command/action endpoint locally (with env vars loaded)
# python -m dotenv run -- python -m uvicorn app.api:app --reload

# Run the poller for every platform in ENABLED_PLATFORMS
# python -m dotenv run -- python -m worker.main

# Refresh a platform's category catalogue (selections are kept by name)
# python -m dotenv run -- python -m scripts.update_categories guru
# python -m dotenv run -- python -m scripts.update_categories freelancer

# Forget or move a watermark
# python -m dotenv run -- python -m scripts.reset_watermark guru
# python -m dotenv run -- python -m scripts.reset_watermark freelancer 38512345
