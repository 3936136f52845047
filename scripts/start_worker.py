#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Expiry Sweep Worker Entry Point
# =============================================================================
# Starts a Celery worker with an embedded beat scheduler, which runs
# purge_expired_pastes every SWEEP_INTERVAL_MINUTES.
#
# Usage:
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker --beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from workers.celery_app import celery_app


def main():
    """Start the Celery worker and beat scheduler."""
    print("=" * 60)
    print("Takobin Expiry Sweep Worker")
    print("=" * 60)
    print()
    print(f"Purging expired pastes every {settings.SWEEP_INTERVAL_MINUTES} minutes")
    print("Press Ctrl+C to stop")
    print()

    # One process is plenty; the sweep is a single periodic task
    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=1",
    ])


if __name__ == "__main__":
    main()
