"""Test helpers"""
