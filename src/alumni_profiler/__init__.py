"""Alumni Profiler — batch ingestion of public career profiles.

Turns a list of public profile URLs into normalized career records by
rendering each page in a headless browser, extracting structured fields with
layered locator heuristics, and summarising the free-text "about" section.
"""

__version__ = "0.1.0"
