"""
Reclaim Insight Rotation Engine
===============================

Turns a snapshot of recent mood, sleep, activity and medication metrics into
ranked insight candidates, then picks one per screen without repeating the
same insight too often for a user.

Modules:
- core/matcher.py : rule conditions evaluated against a MetricsSnapshot
- core/engine.py : matching + feedback suppression + ranking (cached)
- core/seen_store.py : per-user, per-screen exposure history with cooldown
- core/selector.py : scope-aware choice of a single insight
- core/rotation.py : rank -> filter unseen -> select -> mark seen
"""
