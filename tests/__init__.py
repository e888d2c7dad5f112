"""
Test suite for Document Conflict Checker.

Organized by module:
- test_classifier.py - Filename categories and conflict synthesis
- test_pairwise.py - All-pairs batch analysis
- test_analysis_run.py - Staged run state machine, async runner, service
- test_storage.py - Record store and repositories
- test_analytics.py - Derived report statistics
- test_monitors.py - External monitor registry
- test_intake.py - Upload validation
- test_accounts.py - Identity contract and data export
- test_logger.py - Logging context helpers
- test_api.py - FastAPI endpoint tests
"""

# Test fixtures are provided in conftest.py
