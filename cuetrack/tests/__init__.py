"""Tests for the cuetrack package"""
