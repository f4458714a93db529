"""Survey Insights HTTP API"""
