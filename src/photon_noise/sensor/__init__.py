"""
photon_noise.sensor
-------------------
Analytic 35mm-equivalent sensor noise:
    ISO → exposure → electrons → read/shot/PRNU noise.
"""
