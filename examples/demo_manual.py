#!/usr/bin/env python3
"""
Manual Control Demo

An operator script drives the kettle valve by hand: full steam until close
to the target, then the holding valve. Prints score and feedback.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from brew_control.simulation.manual import ManualSession


def main():
    session = ManualSession()
    holding = session.model.holding_valve(session.setpoint)
    print(f"Holding valve for {session.setpoint:.0f} degC: {holding:.1f}%")
    
    def operator(snapshot):
        if snapshot.temperature < session.setpoint - 1.0:
            session.configure(valve=100.0)
        else:
            session.configure(valve=holding)
    
    session.add_observer(operator)
    session.configure(valve=100.0)
    
    for _ in range(6):
        session.step(100)
        print(f"t={session.time:5.1f}s  T={session.temperature:6.2f} degC  "
              f"valve={session.valve:5.1f}%  score={session.score:6.2f}  {session.feedback}")


if __name__ == "__main__":
    main()
