"""
hostlog - Syslog Host Visibility Service

Ingests parsed syslog records from many remote hosts, stores them, and
ranks each host by a visibility score derived from recency, volume and
severity of its recent log activity.
"""

__version__ = "1.0.0"
