from oyster_suitability.pipeline import main

raise SystemExit(main())
