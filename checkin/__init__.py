"""
checkin - Daily Check-in Runner
================================

A Python package that checks in every account of a credential file once a
day and reports the streak returned by the service.

Modules:
--------
- config.py      : Configuration management (loads settings from .env)
- loader.py      : Credential file loading (name:token or name:privateKey lines)
- identity.py    : Token cleaning and wallet message signing
- http_client.py : HTTP client for API communication
- processor.py   : Per-account check-in and response classification
- scheduler.py   : 24-hour cycle loop with a console countdown
- run_checkin.py : Main entry point and orchestration

Usage:
------
    python -m checkin.run_checkin
    python -m checkin.run_checkin --mode wallet --file wallets.txt
    python -m checkin.run_checkin --once

Workflow:
---------
1. Load configuration from .env file
2. Read the credential file (fresh every cycle)
3. Check in each account in file order, one request per account
4. Log one status line per account and a cycle summary
5. Wait 24 hours, then repeat
"""
