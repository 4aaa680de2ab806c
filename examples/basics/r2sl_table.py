"""R2sl of the linearized generalized Bloch model (super-Lorentzian lineshape)

> Assländer J, Gultekin C, Flassbeck S, Glaser SJ, Sodickson DK:
  Generalized Bloch model: A theory for pulsed magnetization transfer.
  Magn Reson Med 2022; 87:2003–2017.
"""

import numpy as np
from matplotlib import pyplot as plt
from gbloch import r2sl

table = r2sl.precompute_R2sl(disp=True)

T2s = 12e-6
alphas = np.linspace(0.05, np.pi, 50)

plt.figure("r2sl")
for TRF in [100e-6, 300e-6, 1e-3, 3e-3]:
    values = [table(TRF, alpha, T2s) * T2s for alpha in alphas]
    plt.plot(np.degrees(alphas), values, label=f"TRF={TRF * 1e3:.1f}ms")
plt.xlabel("flip angle (°)")
plt.ylabel("R2sl x T2s")
plt.title(f"Linearized generalized Bloch model (T2s={T2s * 1e6:.0f}us)")
plt.legend()
plt.grid()
plt.show()
