"""
conftest.py — pytest configuration for the league site.
Puts the project root on sys.path so `league_site` imports resolve without
an editable install, and keeps the Locust profile out of collection.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(__file__))

# Importing locust monkey-patches the stdlib via gevent
collect_ignore = ["tests/load_test.py"]
