"""Operator notifications"""
