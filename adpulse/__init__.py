"""
AdPulse - Meta ads insight sync service
"""
__version__ = "1.0.0"
