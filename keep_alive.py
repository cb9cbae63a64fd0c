"""
Keep-alive script that keeps an HTTP-triggered API and its database warm.
Run this as a long-lived process, or with --once from an external cron job.
"""
import sys
from keepalive.main import main

if __name__ == "__main__":
    sys.exit(main())
