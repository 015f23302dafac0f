"""Front-office application for the MediCare backend.

Holds the in-memory reception queue and pharmacy managers, the REST
endpoints that expose them to the dashboards and the notification feed.
"""
