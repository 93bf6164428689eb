"""
Pure rules over medication and reading records.
Nothing here touches the database, the request or the clock.
"""
