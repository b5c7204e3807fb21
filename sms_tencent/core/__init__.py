"""Providers, services and channel registry"""
