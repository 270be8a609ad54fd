"""
photon_noise.transfer
---------------------
Closed registry of encode ↔ linear tone curves (gamma 2.2/2.8, sRGB, PQ, HLG),
keyed by CICP transfer characteristic.
"""
