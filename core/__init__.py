"""Core application for the MediCore backend.

Users, consultations between patients and doctors, and the clinical
records (vitals, notes, prescriptions, files) gated by them.
"""
