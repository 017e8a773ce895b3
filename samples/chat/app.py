#!/usr/bin/env python3
"""Standalone chat app — run the hub's realtime chat as a web server.

    cd samples/chat
    poetry run python app.py

Starts on http://localhost:8000 (HTTPS=1 for a self-signed certificate) with an
in-memory message store. Clients connect to /ws, send
{"type": "join", "circleId": "..."} and receive every message posted to
POST /api/messages for that circle.

Environment variables:
    PORT                — Server port (default: 8000, 8443 with HTTPS)
    HTTPS               — Set to 1 to serve TLS (default: 0)
    HUB_MESSAGE_STORE   — Set to mongodb to persist messages in MongoDB
    MONGODB_CONNECTION  — MongoDB URI for the mongodb store
"""
from the_hub.standalone import main

if __name__ == "__main__":
    main()
