"""
stormimpact package
===================

Health and economic impact of severe weather events in the U.S. NOAA
storm database.

- The CLI entry point is in `stormimpact/cli.py`.
- Dataset download and parsing is in `stormimpact/loader.py`.
- Year filtering and damage normalization are in `stormimpact/transform.py`.
- Grouping and ranking by event type is in `stormimpact/aggregate.py`.
- Tables, charts and the DOCX report are in `stormimpact/report.py`.
"""

__version__ = '0.1.0'
