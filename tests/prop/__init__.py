"""
Property-based round-trip tests for the GPIF assembler and decompiler.

Hypothesis generates directive sets and valid waveform sources; the tests
check that assembling, decompiling and reassembling reproduces the table.
"""
