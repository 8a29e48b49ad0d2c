"""
Move-selection agents and the move-suggestion oracle interface.
"""
