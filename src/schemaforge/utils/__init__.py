"""
Utilities - Statement splitting, driver connections and error explanations
"""
