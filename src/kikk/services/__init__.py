"""
Shared service utilities.

- http.py - requests session with timeout injection and the identifying User-Agent
"""
