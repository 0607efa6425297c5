"""
eventreview: terminal review console for a public events calendar.
"""
