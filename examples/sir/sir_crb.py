"""Cramer-Rao bounds of SIR parameters (generalized Bloch model)"""

import numpy as np
from matplotlib import pyplot as plt
from gbloch import tissue, r2sl
from gbloch.mapping import sir

wm = tissue.WHITE_MATTER
table = r2sl.precompute_R2sl()

# protocol (Dortch et al.)
print(f"Total time: {sir.total_time():.2f}s")

crb = sir.crb(wm, table=table)
efficiency = sir.efficiency(wm, table=table)
for name in crb:
    print(f"{name}: CRB={crb[name]:.3e}, efficiency={efficiency[name]:.3f}")

# B1 dependence
B1s = np.linspace(0.7, 1.3, 13)
effs = [sir.efficiency(wm.copy(B1=B1), table=table) for B1 in B1s]

plt.figure("sir-crb")
for name in crb:
    plt.plot(B1s, [eff[name] for eff in effs], label=name)
plt.xlabel("B1")
plt.ylabel(r"$\sqrt{CRB}$ / value x $\sqrt{T_{tot}}$")
plt.title("SIR efficiency (unit noise variance)")
plt.legend()
plt.grid()
plt.show()
