"""Asynchronous service orchestration: an engine that runs services along a plan such as a DAG."""

__version__ = "0.1.0"