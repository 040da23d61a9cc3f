"""worktrack package.

Project and time-tracking backend organized by feature modules (customers,
projects, desktop, realtime, ...) with thin Flask controllers over
service/repository layers. Writes are observed by a change bus and pushed to
desktop clients over a WebSocket channel.
"""
