"""Console entry-point for the relay worker.

Run with:

.. code-block:: bash

    python -m slackend.relay --method postMessage

This delegates to `slackend.relay.entry.main()`.
"""

from slackend.relay.entry import main

if __name__ == "__main__":
    main()
