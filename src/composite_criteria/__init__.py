"""
composite-criteria: composite material failure criteria over stress histories.

Evaluates maximum stress, maximum strain, Tsai-Hill, Tsai-Wu (in-plane and
through-thickness), Azzi-Tsai-Hill and Hashin criteria for every analyzed
location, reduces them to the critical instant of the loading history and
writes a tabular report.
"""

__version__ = "0.1.0"
