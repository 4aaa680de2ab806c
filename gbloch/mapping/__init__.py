"""quantitative mapping methods

sir: selective inversion recovery (m0s, R1)
vfa: variable flip angle T1 mapping (DESPOT1)
afi: actual flip angle imaging (B1)
"""

from . import sir, vfa, afi
