"""
photon_noise.grain
------------------
Sensor noise → AV1 luma scaling curve → `filmgrn1` film grain table.
"""
