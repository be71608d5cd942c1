"""Tintura SST - manufacturing operations tracker"""
