"""
Treasure hunt contest server
Submission state machine, pass-key scoring and live leaderboard
"""
__version__ = "1.0.0"
