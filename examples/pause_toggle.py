#!/usr/bin/env python3
"""Pause toggle: pauses a running tournament, or resumes a paused one."""

import sys

from algowar_live import AdminActionError, RestClient, TournamentStatus

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python pause_toggle.py <admin_key> [base_url]")
        sys.exit(2)
    key = sys.argv[1]
    base_url = sys.argv[2] if len(sys.argv) > 2 else "http://localhost:8001"

    client = RestClient(base_url, admin_key=key)
    status = client.get_tournament_status().status
    action = "resume" if status is TournamentStatus.PAUSED else "pause"
    try:
        getattr(client, action)()
    except AdminActionError as e:
        print(e.user_message)
        sys.exit(1)
    print(f"Tournament was {status.value}; sent {action}")
