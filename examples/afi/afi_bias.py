"""B1 bias of actual flip angle imaging due to magnetization transfer"""

import numpy as np
from matplotlib import pyplot as plt
from gbloch import tissue, r2sl
from gbloch.mapping import afi

wm = tissue.WHITE_MATTER
table = r2sl.precompute_R2sl()

B1s = np.linspace(0.6, 1.4, 17)
mt = [afi.bias(wm.copy(B1=B1), table=table)["bias_B1"] for B1 in B1s]
single = [
    afi.bias(wm.copy(m0s=0, B1=B1), TRF=1e-6, model="graham")["bias_B1"]
    for B1 in B1s
]

plt.figure("afi-bias")
plt.plot(B1s, np.asarray(single) * 100, label="single pool")
plt.plot(B1s, np.asarray(mt) * 100, label="generalized Bloch")
plt.xlabel("B1")
plt.ylabel("B1 bias (%)")
plt.title(f"AFI: {afi.ALPHA}°, TR1={afi.TR1 * 1e3:.0f}ms, TR2={afi.TR2 * 1e3:.0f}ms")
plt.legend()
plt.grid()
plt.show()
