"""
Core ingestion logic for Tubely.

The pipeline never talks to FFmpeg, boto3 or the record store directly;
it reaches them through the protocols in core.media.ports, so it can be
tested with in-memory fakes.
"""
