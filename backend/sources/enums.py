"""
Source Enum

Defines all supported upstream job sources.
This is in a separate file to avoid circular imports between registry and sources.
"""

from enum import Enum


class Source(str, Enum):
    """
    Supported job sources

    This enum defines all sources that have adapters implemented.
    """
    REMOTIVE = "remotive"
    REMOTEOK = "remoteok"
    ARBEITNOW = "arbeitnow"
    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    REED = "reed"
    THEMUSE = "themuse"
    ADZUNA = "adzuna"
    JSEARCH = "jsearch"
