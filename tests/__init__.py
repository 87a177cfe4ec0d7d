"""
siteops Tests

Test Organization:
- test_*_service.py: Tests for the optimizer, monitor and reporter services
- core/: Settings tests
- utils/: Utility module tests
- scripts/: Tests for the command-line scripts
  - maintenance/: optimize_assets.py
  - cron/: monitor_website.py

Running Tests:
    # Run all tests
    pytest tests/

    # Run only script tests
    pytest tests/scripts/

    # Run with coverage
    pytest --cov=siteops tests/
"""
