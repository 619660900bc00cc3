"""
Charts of a session history.
"""

from typing import Tuple
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from brew_control.history.buffer import records_to_arrays


class HistoryPlotter:
    """
    Two-panel chart: temperature against setpoint, and valve position.
    """
    
    def __init__(self):
        self._colors = {
            'setpoint': '#2ecc71',
            'temperature': '#3498db',
            'actuator': '#9b59b6',
        }
    
    def plot_history(
        self,
        data,
        title: str = "Brewing Temperature Control",
        figsize: Tuple[int, int] = (12, 7)
    ) -> Figure:
        """
        Plot a history window or an exported file's records.
        
        Args:
            data: Records, or a dict of columns as from HistoryBuffer.to_arrays()
            title: Figure title
            figsize: Figure size
        """
        columns = data if isinstance(data, dict) else records_to_arrays(data)
        t = np.asarray(columns['time'])
        
        fig, (ax_temp, ax_valve) = plt.subplots(2, 1, figsize=figsize, sharex=True)
        fig.suptitle(title, fontsize=14)
        
        ax_temp.plot(t, columns['setpoint'], '--', color=self._colors['setpoint'],
                     label='Setpoint')
        ax_temp.plot(t, columns['temperature'], '-', color=self._colors['temperature'],
                     label='Temperature')
        ax_temp.set_ylabel('Temperature (°C)')
        ax_temp.legend(loc='best')
        ax_temp.grid(True, alpha=0.3)
        
        ax_valve.plot(t, columns['actuator'], '-', color=self._colors['actuator'])
        ax_valve.set_ylim(-5, 105)
        ax_valve.set_xlabel('Time (s)')
        ax_valve.set_ylabel('Valve Position (%)')
        ax_valve.grid(True, alpha=0.3)
        
        fig.tight_layout()
        return fig
    
    @staticmethod
    def save(fig: Figure, filepath: str, dpi: int = 150) -> None:
        """Save figure to file."""
        fig.savefig(filepath, dpi=dpi, bbox_inches='tight')
    
    @staticmethod
    def show() -> None:
        """Display all plots."""
        plt.show()
