"""T1 bias of variable flip angle mapping due to magnetization transfer"""

import numpy as np
from matplotlib import pyplot as plt
from gbloch import tissue, r2sl
from gbloch.mapping import vfa

wm = tissue.WHITE_MATTER
table = r2sl.precompute_R2sl()

res = vfa.bias(wm, table=table)
print(f"T1 = {res['T1'] * 1e3:.0f}ms, 1/R1f = {1e3 / wm.R1f:.0f}ms")
print(f"bias w/r to 1/R1f: {res['bias_T1f'] * 100:+.1f}%")
print(f"bias w/r to 1/R1obs: {res['bias_T1obs'] * 100:+.1f}%")

# pulse duration
durations = np.geomspace(0.1, 3, 12)
biases = [vfa.bias(wm, TRF=TRF * 1e-3, table=table)["bias_T1f"] for TRF in durations]

plt.figure("vfa-bias")
plt.semilogx(durations, np.asarray(biases) * 100)
plt.xlabel("pulse duration (ms)")
plt.ylabel("T1 bias (%)")
plt.title(f"DESPOT1, flip angles: {vfa.ALPHAS}, TR={vfa.TR * 1e3:.0f}ms")
plt.grid()
plt.show()
