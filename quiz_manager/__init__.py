"""
Quiz management system - teacher and student quiz workflows over a relational store
"""
__version__ = "1.0.0"
